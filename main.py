"""Run the posture alert system from a source checkout: python main.py"""

from posture_alert.cli import main

if __name__ == "__main__":
    main()
