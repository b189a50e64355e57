"""Allow ``python -m assetrev``."""

from assetrev import main

if __name__ == "__main__":
    main()
