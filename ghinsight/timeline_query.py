"""GraphQL fragment selecting linked-resource timeline events."""

_RESOURCE_SELECTION = """{{
                            __typename
                            ... on Issue {{
                              number
                              title
                              url
                              state
                              repository {{
                                owner {{
                                  login
                                }}
                                name
                              }}
                            }}
                            ... on PullRequest {{
                              number
                              title
                              url
                              state
                              repository {{
                                owner {{
                                  login
                                }}
                                name
                              }}
                            }}
                          }}"""

_TEMPLATE = (
    "timelineItems(itemTypes: [CROSS_REFERENCED_EVENT, CONNECTED_EVENT, "
    "DISCONNECTED_EVENT], first: {limit}) {{\n"
    "                      nodes {{\n"
    "                        __typename\n"
    "                        ... on CrossReferencedEvent {{\n"
    "                          createdAt\n"
    "                          source " + _RESOURCE_SELECTION + "\n"
    "                          willCloseTarget\n"
    "                        }}\n"
    "                        ... on ConnectedEvent {{\n"
    "                          createdAt\n"
    "                          subject " + _RESOURCE_SELECTION + "\n"
    "                        }}\n"
    "                        ... on DisconnectedEvent {{\n"
    "                          createdAt\n"
    "                          subject " + _RESOURCE_SELECTION + "\n"
    "                        }}\n"
    "                      }}\n"
    "                    }}"
)


def timeline_items_query(event_limit: int) -> str:
    """Return the timelineItems selection fetching at most ``event_limit`` events."""
    if isinstance(event_limit, bool) or not isinstance(event_limit, int):
        raise TypeError("event_limit must be an integer")
    if not 0 <= event_limit <= 255:
        raise ValueError(f"event_limit must be between 0 and 255, got {event_limit}")
    return _TEMPLATE.format(limit=event_limit)