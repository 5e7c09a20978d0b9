"""One module per adapter. Handlers take an event record and the Services bundle."""
