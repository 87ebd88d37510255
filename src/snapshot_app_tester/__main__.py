"""Run the ``snapshot-app-tester`` console script via ``python -m snapshot_app_tester``."""

from snapshot_app_tester.cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
