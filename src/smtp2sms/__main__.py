from smtp2sms.gateway import main

main()
