from .events import WriteEvent, WriteEventKind
