from concierge.scripts.base import Script, ScriptContext
from concierge.scripts.executor import ExecutionResult, execute_intent
from concierge.scripts.registry import get_registered_scripts, get_script, register_script

__all__ = [
    "Script", "ScriptContext", "ExecutionResult", "execute_intent",
    "get_script", "register_script", "get_registered_scripts",
]
