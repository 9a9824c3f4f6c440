# ABOUTME: Package marker for mediaindex.
