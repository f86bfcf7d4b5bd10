"""Application layer: ports and use cases of the Slack forwarder."""
