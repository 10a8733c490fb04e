from billiard_BEM.cli import main

raise SystemExit(main())
