from revshare.cli import main

raise SystemExit(main())
