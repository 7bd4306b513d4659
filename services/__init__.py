"""Reference parsing and the backends that turn a video into a link or a byte stream."""
