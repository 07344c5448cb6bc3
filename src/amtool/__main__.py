"""Allow ``python -m amtool``."""

from .main import main

if __name__ == "__main__":
    main()
