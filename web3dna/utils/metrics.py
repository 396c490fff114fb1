"""Prometheus metrics for Web3DNA."""

from prometheus_client import Counter, Gauge, Histogram


class Metrics:
    """Prometheus metrics collection."""
    
    def __init__(self):
        # Alert delivery metrics
        self.alert_deliveries = Counter(
            'web3dna_alert_deliveries_total',
            'Alert delivery attempts by sink and outcome',
            ['sink', 'status']
        )
        
        self.alerts_dispatched = Counter(
            'web3dna_alerts_dispatched_total',
            'Fraud alerts handed to the fan-out',
            ['severity']
        )
        
        self.live_subscribers = Gauge(
            'web3dna_live_subscribers',
            'Connected live alert subscribers'
        )
        
        # DNA check metrics
        self.dna_checks = Counter(
            'web3dna_dna_checks_total',
            'DNA hash registry checks',
            ['result']
        )
        
        # Request metrics
        self.request_count = Counter(
            'web3dna_api_requests_total',
            'Total number of API requests',
            ['method', 'endpoint', 'status']
        )
        
        self.request_duration = Histogram(
            'web3dna_api_request_duration_seconds',
            'Request duration in seconds',
            ['method', 'endpoint']
        )


# Global metrics instance
metrics = Metrics()
