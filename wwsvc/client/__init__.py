"""Client facades, session state and transports."""
