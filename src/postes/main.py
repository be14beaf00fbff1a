from __future__ import annotations

import logging

from postes.application.container import build_container
from postes.config import get_app_paths, load_settings
from postes.logging_config import setup_logging
from postes.ui.app import App


def main() -> None:
    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)
    settings = load_settings()

    container = build_container(settings, paths)
    logging.getLogger(__name__).info(
        "startup api=%s legacy=%s", settings.base_url, settings.legacy_mode
    )

    app = App(container, logs_dir=str(paths.logs_dir))
    app.mainloop()


if __name__ == "__main__":
    main()
