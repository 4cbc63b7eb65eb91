from __future__ import annotations

import sys


def cli() -> int:
    try:
        from .main import main  # type: ignore
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Failed to import epub_repacker.main: {exc}\n")
        return 1

    try:
        code = main()
        return 0 if (code is None or code == 0) else int(code)
    except SystemExit as se:
        return int(se.code) if isinstance(se.code, int) else 1
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Unhandled error: {exc}\n")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(cli())
