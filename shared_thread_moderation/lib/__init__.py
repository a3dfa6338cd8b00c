"""Infrastructure clients: Postgres, Kafka and Prometheus."""
