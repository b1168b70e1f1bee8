from agent_ready.api_stub.cli import main

raise SystemExit(main())
