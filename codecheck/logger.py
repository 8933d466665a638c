import logging
import sys

LOG_FORMAT = "[CODECHECK] %(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    # one handler, even when the app factory runs more than once (tests, reload)
    if not any(getattr(h, "_codecheck", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._codecheck = True  # type: ignore[attr-defined]
        root.addHandler(handler)
