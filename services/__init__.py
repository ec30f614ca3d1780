# Service layer: storage, fetching, reports
