from .models import GraphPoint, PlaylistLocator, PlaylistResult, RawVideoRecord, VideoRecord

__all__ = ['GraphPoint', 'PlaylistLocator', 'PlaylistResult', 'RawVideoRecord', 'VideoRecord']
