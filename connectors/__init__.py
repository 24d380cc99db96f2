"""
connectors — third-party providers and connector records.

Provides:
  • OAuth2 auth-URL generation and code → token exchange per provider
  • Live previews of what a connector would sync
  • Daily schedule → cron conversion and form validity
  • Connector persistence (create / get / list / delete / sync results)
  • Fernet encryption of provider tokens at rest

Each provider (Notion, Zendesk, …) is a subclass of BaseConnector.
"""
