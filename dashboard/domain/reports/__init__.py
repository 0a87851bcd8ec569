"""Reports domain - WhatsApp daily booking report"""
