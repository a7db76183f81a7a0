"""Allow ``python -m monad_optimizer``."""

from monad_optimizer.main import main

raise SystemExit(main())
