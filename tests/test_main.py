from unittest.mock import patch

import billdesk.__main__ as main_module


class TestMain:
    def test_runs_migrations_then_serves(self):
        with (
            patch.object(main_module, "initialize_db") as mock_init,
            patch.object(main_module, "uvicorn") as mock_uvicorn,
        ):
            main_module.main()
        mock_init.assert_called_once()
        args, kwargs = mock_uvicorn.run.call_args
        assert args == ("web.app:app",)
        assert kwargs["port"] == main_module.settings.port
