"""
Central agent registry and registration decorator.
Use @register_agent("name") above your agent class to make it available to the CLI, the scheduler and simulations.
The difficulty tiers ('easy', 'medium', 'hard') are registered under their own names.
All agent modules must be imported here to ensure registration occurs.
"""

AGENT_MAP = {}

def register_agent(name):
	"""
	Decorator to register an agent class under a given name.
	Usage:
		@register_agent("easy")
		class EasyAgent(ConfidenceAgent): ...
	"""
	def decorator(cls):
		AGENT_MAP[name] = cls
		return cls
	return decorator


def agent_for(difficulty=None, rng=None):
	"""
	Build the registered agent for a difficulty tier name (defaults to 'medium').
	Raises:
		ValueError: If no agent is registered under that name.
	"""
	name = (difficulty or "medium").lower()
	if name not in AGENT_MAP:
		raise ValueError(f"Unknown agent: {name}")
	return AGENT_MAP[name](rng=rng)

# Automatically import all agent modules in this directory to ensure registration decorators run
import importlib
import os
import pkgutil

_this_dir = os.path.dirname(__file__)
_pkg_name = __name__
for _, modname, ispkg in pkgutil.iter_modules([_this_dir]):
	if not ispkg and modname not in ("__init__", "base"):
		importlib.import_module(f"{_pkg_name}.{modname}")
