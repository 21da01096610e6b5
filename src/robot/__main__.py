"""
Module runner for src.robot package.

Allows running the robot with: python -m src.robot
"""

from .main import main

if __name__ == "__main__":
    main()
