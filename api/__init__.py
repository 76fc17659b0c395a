"""HTTP service and command-line tool for the CURRENTMAP dataset server."""
