"""Social sign-in gateway: verifies identity proofs and issues session tokens."""
