"""
Request sequencing for out-of-order response suppression
"""


class RequestSequence:
    """
    Issues increasing tokens; only the newest token is current
    
    A response is applied only if the token of its request is still current.
    """
    
    def __init__(self):
        self._latest = 0
    
    @property
    def latest(self) -> int:
        return self._latest
    
    def next(self) -> int:
        self._latest += 1
        return self._latest
    
    def is_current(self, token: int) -> bool:
        return token == self._latest
    
    def invalidate(self):
        """Make every issued token stale"""
        self._latest += 1
