"""GET, SET, PING, PUBLISH, SUBSCRIBE and UNSUBSCRIBE commands, with dispatch."""