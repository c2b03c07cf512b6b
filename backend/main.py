"""
Main entry point: run the address book API with uvicorn
"""
import sys
from pathlib import Path

# Ensure backend/ is on sys.path when started as `python backend/main.py`
_backend_dir = Path(__file__).resolve().parent
if str(_backend_dir) not in sys.path:
    sys.path.insert(0, str(_backend_dir))

from addressbook.main import app  # noqa: E402,F401


if __name__ == "__main__":
    import uvicorn

    from addressbook.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "addressbook.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
