import platform
import sys
import logging

log = logging.getLogger("StudyForge")


def startup_banner(
    *,
    provider: str,
    model: str,
    commands: int,
    version: str,
    mode: str,
) -> None:
    rows = [
        ("CORE", f"StudyForge v{version}"),
        ("ENV", mode),
        ("RUNTIME", f"Python {sys.version.split()[0]}"),
        ("HOST", platform.system()),
        ("PROVIDER", provider),
        ("MODEL", model),
        ("COMMANDS", str(commands)),
    ]

    line = "─" * 44
    label_width = max(len(k) for k, _ in rows)

    log.info(line)
    log.info(" StudyForge is online")
    log.info("")
    for k, v in rows:
        log.info("%s : %s", k.ljust(label_width), v)
    log.info(line)
