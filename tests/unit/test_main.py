import logging
from unittest.mock import AsyncMock, patch

import pytest

from app.main import app, lifespan


@pytest.mark.asyncio
async def test_lifespan_does_not_repeat_credentials_warning(caplog):
    with patch("app.main.settings") as mock_settings, \
         patch("app.main.close_http_client", new_callable=AsyncMock) as mock_close:
        mock_settings.app_name = "Ton.Place Mini App"
        mock_settings.app_id = "YOUR_APP_ID"
        mock_settings.environment = "development"
        mock_settings.credentials_configured = False

        with caplog.at_level(logging.INFO):
            async with lifespan(app):
                pass

    mock_close.assert_awaited_once()
    assert "credentials_configured=False" in caplog.text
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
