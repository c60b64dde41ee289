from mockserver_client.cli import main

raise SystemExit(main())
