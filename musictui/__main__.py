import sys

from musictui.main import main

sys.exit(main())
