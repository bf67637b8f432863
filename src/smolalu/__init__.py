"""Small gateware ALU: ripple-chain cores, FSM controllers and a dispatcher."""
