"""Identity reconciliation core: credential and OAuth sign-in, identity linking and ID verification."""
