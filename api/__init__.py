"""HTTP surface of youtubelink."""
