# ABOUTME: Package marker for mediaindex.core.
