import sys

from facturador.main import main

sys.exit(main())
