"""In-memory topic queues, table storages and a mock topic manager for tests."""