import logging

ROOT = "learnpath"


def get_logger(name: str) -> logging.Logger:
    """Loggers live under the `learnpath.` namespace and share one handler."""
    root = logging.getLogger(ROOT)
    if not root.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(fmt)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return logging.getLogger(f"{ROOT}.{name}")


def snippet(text: str | None, n: int = 400) -> str:
    return (text or "")[:n].replace("\n", "\\n").replace("\r", "\\r")


"""
Logging setup and it configures:
- Log format
- Log level
- Output destination
- Safe one-line snippets of upstream payloads

The main purpose:
Standardized application logging.
"""
