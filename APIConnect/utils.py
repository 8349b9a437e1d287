from typing import Any, Dict, Optional


_MISSING = object()


def get_by_path(data: Any, path: str, default: Any = None) -> Any:
  """Look up a dot-separated path ("data.servers.0.id") inside decoded JSON."""
  current = data
  for segment in path.split('.'):
      if isinstance(current, dict):
          current = current.get(segment, _MISSING)
      elif isinstance(current, list):
          try:
              current = current[int(segment)]
          except (ValueError, IndexError):
              current = _MISSING
      else:
          current = _MISSING

      if current is _MISSING:
          return default
  return current


def merge_dicts(*layers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
  # later layers win
  merged: Dict[str, Any] = {}
  for layer in layers:
      if layer:
          merged.update(layer)
  return merged


def merge_headers(*layers: Optional[Dict[str, str]]) -> Dict[str, str]:
  """Like ``merge_dicts`` but header names match case-insensitively.

  The spelling of the layer that wins is kept.
  """
  merged: Dict[str, str] = {}
  names: Dict[str, str] = {}
  for layer in layers:
      for name, value in (layer or {}).items():
          previous = names.pop(name.lower(), None)
          if previous is not None:
              del merged[previous]
          names[name.lower()] = name
          merged[name] = value
  return merged


def join_url(base_url: str, endpoint: str) -> str:
  if not base_url:
      return endpoint
  if endpoint.startswith(('http://', 'https://')):
      return endpoint
  return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}" if endpoint else base_url.rstrip('/')
