"""
Prometheus metrics for the FilmMatch application.

This module provides metrics collection for request handling, film reactions,
the friend-request lifecycle, recommendation computation and unit-of-work
outcomes.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST


# HTTP Request Metrics
http_requests_total = Counter(
    'filmmatch_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'filmmatch_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Film Reaction Metrics
film_reactions_total = Counter(
    'filmmatch_film_reactions_total',
    'Total number of film reaction toggles',
    ['kind', 'state']  # kind: like, dislike, bookmark, unbookmark
)

# Friend Graph Metrics
friend_request_transitions_total = Counter(
    'filmmatch_friend_request_transitions_total',
    'Total number of friend request lifecycle transitions',
    ['transition']  # sent, accepted, declined, friend_deleted
)

# Recommendation Metrics
recommendations_served_total = Counter(
    'filmmatch_recommendations_served_total',
    'Total number of recommendation lists served',
    ['strategy']  # scored, fallback
)

recommendation_duration_seconds = Histogram(
    'filmmatch_recommendation_duration_seconds',
    'Recommendation computation duration in seconds'
)

# Unit of Work Metrics
unit_of_work_total = Counter(
    'filmmatch_unit_of_work_total',
    'Total number of units of work by outcome',
    ['operation', 'outcome']  # committed, rejected, rolled_back, cancelled
)

# Notification Metrics
notifications_total = Counter(
    'filmmatch_notifications_total',
    'Total number of notifications dispatched',
    ['status']  # sent, skipped, error
)


def track_http_request(method, endpoint, status, duration=None):
    """
    Record an HTTP request.

    Args:
        method: HTTP method
        endpoint: URL rule or path
        status: Response status code
        duration: Duration in seconds (optional)
    """
    http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
    if duration is not None:
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_reaction(kind, state):
    """Record a like/dislike/bookmark toggle and the state it produced."""
    film_reactions_total.labels(kind=kind, state=state).inc()


def track_friend_transition(transition):
    friend_request_transitions_total.labels(transition=transition).inc()


def track_recommendations(strategy, duration=None):
    """
    Record a served recommendation list.

    Args:
        strategy: 'scored' or 'fallback'
        duration: Computation time in seconds (optional)
    """
    recommendations_served_total.labels(strategy=strategy).inc()
    if duration is not None:
        recommendation_duration_seconds.observe(duration)


def track_unit_of_work(operation, outcome):
    unit_of_work_total.labels(operation=operation, outcome=outcome).inc()


def track_notification(status):
    notifications_total.labels(status=status).inc()


def get_metrics():
    """
    Generate Prometheus metrics in text format.

    Returns:
        Tuple of (metrics_text, content_type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
