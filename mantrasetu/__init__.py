"""MantraSetu customer-facing web client."""
