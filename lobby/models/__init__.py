# Models package
from .room import Room
