CLAUDE_SONNET_MODEL = "claude-sonnet-4-5-20250929"
