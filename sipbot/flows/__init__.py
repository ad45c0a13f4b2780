"""Business flows: users, funds, SIP plans, scheduling and portfolio valuation.

Every flow takes its repositories and services as keyword-only arguments; any
left as None is filled from the container by @dependency.

Note: importing any module from this package imports sipbot.core.container,
      so the registry is populated before the first flow call.
"""

import sipbot.core.container  # noqa: F401 - Trigger dependency registration
