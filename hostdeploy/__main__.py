"""Allow `python -m hostdeploy`"""

from hostdeploy.main import main

if __name__ == "__main__":
    main()
