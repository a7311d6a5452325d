"""Email service tests."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from userverify.models import Account
from userverify.services.email import (
    VERIFICATION_TEMPLATE,
    ConsoleEmailBackend,
    EmailService,
    RenderedEmail,
    ResendEmailBackend,
    SMTPEmailBackend,
    get_email_backend,
)

LINK = "http://localhost:8000/api/verification/abc123?table=users"


@pytest.fixture
def context() -> dict:
    account = Account(id="1", email="a@x.com", table_name="users", verification_token="abc123")
    return {"user": account, "link": LINK}


@pytest.fixture
def rendered(context: dict) -> RenderedEmail:
    return EmailService(backend=AsyncMock()).render(
        VERIFICATION_TEMPLATE, to="a@x.com", context=context, subject="Verify"
    )


class TestBackends:
    """Tests for the transport backends."""

    @pytest.mark.asyncio
    async def test_console_logs_email(self, caplog, rendered: RenderedEmail):
        with caplog.at_level(logging.INFO):
            result = await ConsoleEmailBackend().send(rendered)

        assert result is True
        assert "a@x.com" in caplog.text
        assert LINK in caplog.text

    @pytest.mark.asyncio
    async def test_smtp_builds_multipart_message(self, rendered: RenderedEmail):
        backend = SMTPEmailBackend(host="smtp.example.com", port=587, from_address="noreply@example.com")

        with patch("userverify.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await backend.send(rendered)

        assert result is True
        message = mock_send.call_args[0][0]
        assert message["To"] == "a@x.com"
        assert message["Subject"] == "Verify"
        assert len(message.get_payload()) == 2
        assert mock_send.call_args[1]["username"] is None

    @pytest.mark.asyncio
    async def test_smtp_failure_returns_false(self, caplog, rendered: RenderedEmail):
        """Test that transport errors are logged and reported as False."""
        backend = SMTPEmailBackend(host="smtp.example.com", port=587)

        with (
            caplog.at_level(logging.ERROR),
            patch(
                "userverify.services.email.aiosmtplib.send",
                new_callable=AsyncMock,
                side_effect=Exception("Connection refused"),
            ),
        ):
            result = await backend.send(rendered)

        assert result is False
        assert "emails.user-verification to a@x.com failed via smtp" in caplog.text

    @pytest.mark.asyncio
    async def test_resend_payload(self, rendered: RenderedEmail):
        backend = ResendEmailBackend(api_key="re_test_key", from_address="noreply@example.com")
        mock_response = MagicMock(is_error=False)

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = mock_response
            result = await backend.send(rendered)

        assert result is True
        payload = mock_post.call_args[1]["json"]
        assert payload["to"] == ["a@x.com"]
        assert payload["tags"] == [{"name": "template", "value": "emails_user-verification"}]

    @pytest.mark.asyncio
    async def test_resend_api_error(self, caplog, rendered: RenderedEmail):
        backend = ResendEmailBackend(api_key="re_test_key", from_address="noreply@example.com")
        mock_response = MagicMock(is_error=True, status_code=422, text="Invalid recipient")

        with caplog.at_level(logging.ERROR), patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = mock_response
            result = await backend.send(rendered)

        assert result is False
        assert "422 - Invalid recipient" in caplog.text

    def test_get_email_backend(self):
        with patch("userverify.services.email.settings") as mock_settings:
            mock_settings.email_backend = "smtp"
            mock_settings.smtp_host = "smtp.example.com"
            mock_settings.smtp_port = 587

            backend = get_email_backend()

        assert isinstance(backend, SMTPEmailBackend)
        assert backend.host == "smtp.example.com"

    def test_get_email_backend_invalid(self):
        with patch("userverify.services.email.settings") as mock_settings:
            mock_settings.email_backend = "pigeon"

            with pytest.raises(ValueError, match="Unknown email backend"):
                get_email_backend()


class TestEmailService:
    """Tests for EmailService."""

    def test_render_verification(self, rendered: RenderedEmail):
        assert rendered.template_id == VERIFICATION_TEMPLATE
        assert LINK in rendered.html
        assert LINK in rendered.text
        assert "a@x.com" in rendered.text

    @pytest.mark.asyncio
    async def test_send_template(self, context: dict):
        mock_backend = AsyncMock()
        mock_backend.send.return_value = True
        service = EmailService(backend=mock_backend)

        result = await service.send_template(
            VERIFICATION_TEMPLATE,
            to="a@x.com",
            context=context,
            subject="Your Account Verification Link",
        )

        assert result is True
        email = mock_backend.send.call_args[0][0]
        assert email.to == "a@x.com"
        assert email.subject == "Your Account Verification Link"
        assert "abc123" in email.html

    @pytest.mark.asyncio
    async def test_send_unknown_template(self, context: dict):
        service = EmailService(backend=AsyncMock())

        with pytest.raises(ValueError, match="Unknown email template"):
            await service.send_template("emails.nope", to="a@x.com", context=context, subject="x")

    @pytest.mark.asyncio
    async def test_register_template(self):
        mock_backend = AsyncMock()
        mock_backend.send.return_value = True
        service = EmailService(backend=mock_backend)
        service.register_template("emails.welcome", lambda ctx: (f"<p>{ctx['name']}</p>", ctx["name"]))

        await service.send_template("emails.welcome", to="a@x.com", context={"name": "Ada"}, subject="Hi")

        assert mock_backend.send.call_args[0][0].text == "Ada"

    def test_lazy_backend_loading(self):
        service = EmailService()

        with patch("userverify.services.email.get_email_backend") as mock_get_backend:
            mock_get_backend.return_value = ConsoleEmailBackend()

            backend = service.backend
            assert service.backend is backend
            mock_get_backend.assert_called_once()
