"""pkgmgr - install packages and drivers listed in a remote manifest."""
