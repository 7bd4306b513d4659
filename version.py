#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Version information for youtubelink."""

__version__ = "1.2.0"
