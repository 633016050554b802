import sys
import logging

from pydantic import ValidationError

from config import EngineConfig
from engine import PaymentsEngine
from errors import ProcessingAborted
from money import format_amount

logger = logging.getLogger(__name__)


def format_report(snapshots) -> str:
    lines = ["client,available,held,total,locked"]
    for account in snapshots:
        lines.append(
            f"{account.client_id},"
            f"{format_amount(account.available)},"
            f"{format_amount(account.held)},"
            f"{format_amount(account.total)},"
            f"{str(account.locked).lower()}"
        )
    return "\n".join(lines)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    try:
        config = EngineConfig()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(config)
    try:
        engine.process_file(argv[0])
    except ProcessingAborted as e:
        logger.critical(f"Run aborted: {e.error}")
        return 2
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Can't read {argv[0]}: {e}")
        return 1

    print(format_report(engine.snapshot()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
