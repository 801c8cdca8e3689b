from importlib import import_module

modules = [
    'swarm',
    'swarm_alerts',
    'swarm_analytics',
]

for m in modules:
    import_module(f'.{m}', __name__)

__all__ = modules
