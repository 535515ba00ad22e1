"""Native driver adapters whose objects can be wrapped by the instrumented proxies."""
