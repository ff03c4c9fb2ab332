"""
PetMap Launcher.
Entry point for running the map widget demo from the repository root.
"""

from petmap.app.entry import main

if __name__ == "__main__":
    main()
