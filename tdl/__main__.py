"""Allow ``python -m tdl``."""

from tdl.main import main

if __name__ == "__main__":
    raise SystemExit(main())
