import sys

from .chat_bot import main

sys.exit(main())
