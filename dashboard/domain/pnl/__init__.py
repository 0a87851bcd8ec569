"""P&L domain - monthly expenses against Razorpay settlements"""
