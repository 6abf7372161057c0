from news_aggregator.main import main

raise SystemExit(main())
