"""HTTP API adapters exposing the registry as JSON over HTTP."""
