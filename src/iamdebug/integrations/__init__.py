"""OS vault, loopback redirect capture and the OAuth login flow."""
