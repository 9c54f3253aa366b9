import sys

from dailyweather.cli import main

sys.exit(main())
