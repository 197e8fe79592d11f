# Host-side helpers: device namespace, filesystems, instance metadata
