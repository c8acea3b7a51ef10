from fleet import *

# each comma separated key in PRIVATE_KEYS runs its own worker, see .env.example
sys.exit(main())
