"""python -m posture_alert"""

from .cli import main

main()
